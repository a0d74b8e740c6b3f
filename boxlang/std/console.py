import sys
from typing import Optional, TextIO


class Console:
    """Terminal collaborator behind ``print`` and ``input``.

    ``out`` of ``None`` means whatever ``sys.stdout`` is at write time.
    """
    def __init__(self, out: Optional[TextIO] = None):
        self.out = out

    def write_line(self, text: str) -> None:
        stream = self.out if self.out is not None else sys.stdout
        stream.write(text + '\n')
        stream.flush()

    def prompt(self, message: str) -> Optional[str]:
        """Ask for one line of input; ``None`` when input is exhausted."""
        try:
            return input(message + ' ')
        except EOFError:
            return None
