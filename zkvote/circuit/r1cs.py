"""
R1CS 제약 시스템 (Rank-1 Constraint System)
============================================

투표 회로를 표현하는 산술화 계층이다.

**제약 형태**:
  각 제약은 세 선형 결합 A, B, C에 대해

      ⟨A, w⟩ · ⟨B, w⟩ = ⟨C, w⟩

  를 요구한다. w는 전체 배선 값 벡터(witness)이다.

**배선 배치**:
  | 인덱스        | 내용                                   |
  |---------------|----------------------------------------|
  | 0             | 상수 1                                 |
  | 1 .. k        | 공개 입력 (할당 순서 = 공개 신호 순서) |
  | k+1 ..        | 비공개 입력 및 중간 배선               |

  공개 입력은 반드시 비공개 배선보다 먼저 할당해야 한다.
  Groth16 검증자는 인덱스 0..k만 본다.

**선형 결합은 공짜**:
  덧셈과 상수배는 새 배선을 만들지 않고 LinearCombination 안에서 처리된다.
  곱셈만 제약 하나와 배선 하나를 소비한다 (Poseidon의 MDS 층이 제약 없이 처리되는 이유).

**값 추적**:
  같은 합성(synthesis) 코드가 witness 유무와 관계없이 실행된다.
  값을 모르면 value=None으로 전파되며, 제약 구조는 값에 의존하지 않는다.

**건전성 감사 (unconstrained_wires)**:
  어떤 제약에도 등장하지 않는 배선은 부정직한 prover가 임의로 정할 수 있다.
  회로 전체에서 이런 배선이 없어야 한다.

사용 예시:
    >>> cs = ConstraintSystem()
    >>> x = cs.public_input("x", 3)
    >>> y = cs.mul(x, x, "x²")
    >>> cs.is_satisfied()   # True
"""

from zkvote.field import FR, to_field


class LinearCombination:
    """Σ cᵢ · wᵢ 형태의 선형 결합.

    속성:
        terms: 배선 인덱스 → FR 계수 (0 계수는 저장하지 않음)
        value: 알려진 경우 현재 witness에서의 값, 아니면 None
    """

    __slots__ = ("terms", "value")

    def __init__(self, terms=None, value=None):
        self.terms = terms if terms is not None else {}
        self.value = value

    @classmethod
    def constant(cls, c):
        c = c if isinstance(c, FR) else FR(c)
        if c == FR(0):
            return cls({}, FR(0))
        return cls({0: c}, c)

    @classmethod
    def zero(cls):
        return cls({}, FR(0))

    @classmethod
    def combine(cls, pairs):
        """Σ coeff · lc 를 한 번에 계산한다.

        Args:
            pairs: (FR 계수, LinearCombination) 튜플의 iterable
        """
        terms = {}
        value = FR(0)
        for coeff, lc in pairs:
            if coeff == FR(0):
                continue
            for wire, c in lc.terms.items():
                terms[wire] = terms.get(wire, FR(0)) + coeff * c
            if value is not None:
                value = None if lc.value is None else value + coeff * lc.value
        terms = {w: c for w, c in terms.items() if c != FR(0)}
        return cls(terms, value)

    def wires(self):
        return self.terms.keys()

    def evaluate(self, witness):
        total = FR(0)
        for wire, c in self.terms.items():
            total = total + c * witness[wire]
        return total

    def __add__(self, other):
        other = _as_lc(other)
        return LinearCombination.combine([(FR(1), self), (FR(1), other)])

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        other = _as_lc(other)
        return LinearCombination.combine([(FR(1), self), (FR(-1), other)])

    def __rsub__(self, other):
        return _as_lc(other).__sub__(self)

    def __neg__(self):
        return LinearCombination.combine([(FR(-1), self)])

    def __mul__(self, scalar):
        if isinstance(scalar, LinearCombination):
            raise TypeError("선형 결합끼리의 곱은 ConstraintSystem.mul을 사용하세요")
        scalar = scalar if isinstance(scalar, FR) else FR(scalar)
        return LinearCombination.combine([(scalar, self)])

    def __rmul__(self, scalar):
        return self.__mul__(scalar)

    def __repr__(self):
        terms = " + ".join(f"{int(c)}·w{w}" for w, c in sorted(self.terms.items()))
        return f"LC({terms or '0'})"


def _as_lc(value):
    if isinstance(value, LinearCombination):
        return value
    return LinearCombination.constant(value)


class Constraint:
    """A · B = C 제약 하나."""

    __slots__ = ("a", "b", "c", "label")

    def __init__(self, a, b, c, label=""):
        self.a = a
        self.b = b
        self.c = c
        self.label = label

    def check(self, witness):
        return self.a.evaluate(witness) * self.b.evaluate(witness) == self.c.evaluate(witness)


class ConstraintSystem:
    """R1CS 제약 시스템과 (선택적) witness."""

    def __init__(self):
        self.wire_names = ["one"]
        self.values = [FR(1)]
        self.num_public = 0
        self.constraints = []
        self._private_started = False

    # ── 배선 할당 ──

    @property
    def num_wires(self):
        return len(self.wire_names)

    @property
    def num_constraints(self):
        return len(self.constraints)

    def one(self):
        return LinearCombination({0: FR(1)}, FR(1))

    def _alloc(self, name, value):
        if value is not None:
            value = to_field(value)
        index = len(self.wire_names)
        self.wire_names.append(name)
        self.values.append(value)
        return LinearCombination({index: FR(1)}, value)

    def public_input(self, name, value=None):
        """공개 입력 배선을 할당한다.

        Raises:
            RuntimeError: 비공개 배선이 이미 할당된 경우
        """
        if self._private_started:
            raise RuntimeError("공개 입력은 비공개 배선보다 먼저 할당해야 합니다")
        self.num_public += 1
        return self._alloc(name, value)

    def private_input(self, name, value=None):
        self._private_started = True
        return self._alloc(name, value)

    # 중간 배선 (prover의 힌트로 값이 정해지고 제약으로 고정된다)
    alloc = private_input

    # ── 제약 ──

    def constrain(self, a, b, c, label=""):
        self.constraints.append(Constraint(_as_lc(a), _as_lc(b), _as_lc(c), label))

    def mul(self, a, b, name):
        """out = a · b 배선을 만들고 제약한다."""
        a, b = _as_lc(a), _as_lc(b)
        value = None
        if a.value is not None and b.value is not None:
            value = a.value * b.value
        out = self.alloc(name, value)
        self.constrain(a, b, out, name)
        return out

    def assign(self, lc, name):
        """선형 결합을 새 배선으로 고정한다: lc · 1 = out."""
        out = self.alloc(name, lc.value)
        self.constrain(lc, self.one(), out, name)
        return out

    def assert_equal(self, a, b, label):
        self.constrain(_as_lc(a) - _as_lc(b), self.one(), LinearCombination.zero(), label)

    def assert_zero(self, a, label):
        self.constrain(a, self.one(), LinearCombination.zero(), label)

    # ── witness 검사 ──

    def witness(self):
        """전체 witness 벡터.

        Raises:
            ValueError: 값이 정해지지 않은 배선이 있는 경우
        """
        missing = [n for n, v in zip(self.wire_names, self.values) if v is None]
        if missing:
            raise ValueError(f"값이 없는 배선이 있습니다: {missing[:5]}")
        return list(self.values)

    def public_values(self, witness=None):
        """공개 입력 값 (상수 1 제외, 할당 순서)."""
        if witness is None:
            witness = self.witness()
        return witness[1:1 + self.num_public]

    def unsatisfied(self, witness=None):
        """만족되지 않는 제약의 label 목록."""
        if witness is None:
            witness = self.witness()
        return [con.label for con in self.constraints if not con.check(witness)]

    def is_satisfied(self, witness=None):
        return not self.unsatisfied(witness)

    def unconstrained_wires(self):
        """어떤 제약에도 등장하지 않는 배선 이름 (상수 1 제외)."""
        used = set()
        for con in self.constraints:
            used.update(con.a.wires())
            used.update(con.b.wires())
            used.update(con.c.wires())
        return [
            name for index, name in enumerate(self.wire_names)
            if index != 0 and index not in used
        ]

    def matrices(self):
        """희소 행렬 (A, B, C): 각 행은 {배선 인덱스: FR 계수}."""
        a_rows = [dict(con.a.terms) for con in self.constraints]
        b_rows = [dict(con.b.terms) for con in self.constraints]
        c_rows = [dict(con.c.terms) for con in self.constraints]
        return a_rows, b_rows, c_rows
