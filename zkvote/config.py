"""
원장 설정
=========

환경 변수 ZKVOTE_* 에서 원장 설정을 읽는다.

| 환경 변수                  | 필드                | 기본값            |
|----------------------------|---------------------|-------------------|
| ZKVOTE_MERKLE_ROOT         | merkle_root         | 0                 |
| ZKVOTE_TREE_DEPTH          | tree_depth          | 20                |
| ZKVOTE_VERIFYING_KEY_PATH  | verifying_key_path  | 없음              |
| ZKVOTE_DB_PATH             | db_path             | 없음 (메모리 DB)  |
| ZKVOTE_LOG_LEVEL           | log_level           | INFO              |
| ZKVOTE_SECRET_KEY          | secret_key          | key               |

merkle_root는 10진수 또는 0x 접두사 16진수를 받으며 [0, p) 범위여야 한다.
빈 문자열은 설정되지 않은 것으로 본다.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from zkvote.field import to_field
from zkvote.merkle import TREE_DEPTH

ENV_PREFIX = "ZKVOTE_"


@dataclass
class LedgerConfig:
    merkle_root: int = 0
    tree_depth: int = TREE_DEPTH
    verifying_key_path: Path = None
    db_path: Path = None  # None이면 메모리 TinyDB
    log_level: str = "INFO"
    secret_key: str = "key"

    def __post_init__(self):
        self.merkle_root = int(to_field(int(self.merkle_root)))
        self.tree_depth = int(self.tree_depth)
        if self.verifying_key_path is not None:
            self.verifying_key_path = Path(self.verifying_key_path)
        if self.db_path is not None:
            self.db_path = Path(self.db_path)
        self.log_level = self.log_level.upper()


def load_config(environ=None):
    """환경 변수에서 LedgerConfig를 만든다.

    Args:
        environ: 환경 변수 dict. 기본값은 os.environ

    Raises:
        ValueError: merkle_root가 정수가 아니거나 필드 범위를 벗어난 경우
    """
    if environ is None:
        environ = os.environ
    values = {}
    for name in ("merkle_root", "tree_depth", "verifying_key_path", "db_path",
                 "log_level", "secret_key"):
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw:
            values[name] = raw
    if "merkle_root" in values:
        values["merkle_root"] = int(values["merkle_root"], 0)
    return LedgerConfig(**values)
