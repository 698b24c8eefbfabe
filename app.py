import json
import logging
import threading

from flask import Flask
from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from zkvote.config import load_config
from zkvote.events import EventLog
from zkvote.oracle import Groth16Oracle
from zkvote.registry import Registry

from vote_routes import vote_bp, init_vote_bp
from vote_serializers import deserialize_verifying_key

logger = logging.getLogger(__name__)


def open_db(config):
    if config.db_path is None:
        return TinyDB(storage=MemoryStorage)   # Memory DB
    return TinyDB(config.db_path)              # Storage DB


def load_oracle(config):
    if config.verifying_key_path is None:
        raise ValueError("ZKVOTE_VERIFYING_KEY_PATH is not set")
    with open(config.verifying_key_path) as f:
        verifying_key = deserialize_verifying_key(json.load(f))
    logger.info("verifying key loaded from %s", config.verifying_key_path)
    return Groth16Oracle(verifying_key)


def create_app(config=None, oracle=None, clock=None, db=None):
    if config is None:
        config = load_config()
    if db is None:
        db = open_db(config)
    if oracle is None:
        oracle = load_oracle(config)

    app = Flask(__name__)
    app.secret_key = config.secret_key
    app.config.update(
        ZKVOTE_MERKLE_ROOT=config.merkle_root,
        ZKVOTE_TREE_DEPTH=config.tree_depth,
        ZKVOTE_VERIFYING_KEY_PATH=config.verifying_key_path,
        ZKVOTE_DB_PATH=config.db_path,
    )

    registry = Registry(config.merkle_root, oracle, clock=clock, events=EventLog(db))
    init_vote_bp(app, registry, threading.Lock())
    app.register_blueprint(vote_bp)
    logger.info("ledger ready, root=%d", config.merkle_root)
    return app


if __name__ == "__main__":
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    create_app(config).run(debug=False)
