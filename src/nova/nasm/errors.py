''' Compile errors. Every one of them aborts the whole compilation '''


class Position:
    line: int
    col: int

    def __init__(self, line: int, col: int):
        self.line = line
        self.col = col

    def __eq__(self, other) -> bool:
        return isinstance(other, Position) and (self.line, self.col) == (other.line, other.col)

    def __repr__(self) -> str:
        return f'Position({self.line}, {self.col})'

    def __str__(self) -> str:
        return f'{self.line}:{self.col}'


class AssemblerError(Exception):
    position: Position | None

    def __init__(self, message: str, position: Position | None = None):
        self.position = position

        if position is not None:
            message = f'{position}: {message}'

        super().__init__(message)


class CompileSyntaxError(AssemblerError):
    def __init__(self, position: Position, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f'expected {expected} got {actual!r}', position)


class InvalidOperandError(AssemblerError):
    def __init__(self, position: Position, kind: str, text: str):
        self.kind = kind
        self.text = text
        super().__init__(f'invalid {kind} {text!r}', position)


class UnresolvedLabelError(AssemblerError):
    def __init__(self, label: str, position: Position | None = None):
        self.label = label
        super().__init__(f'unresolved label {label!r}', position)


class DuplicateLabelError(AssemblerError):
    def __init__(self, label: str, position: Position | None = None):
        self.label = label
        super().__init__(f'duplicate label {label!r}', position)
