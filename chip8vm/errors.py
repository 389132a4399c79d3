"""Exceptions raised by the CHIP-8 interpreter."""


class Chip8Error(Exception):
    """Base class for all interpreter errors."""


class AddressOutOfBoundsError(Chip8Error):
    """Fetch or memory access past the end of the 4 KiB address space."""

    def __init__(self, address: int, what: str = "access"):
        self.address = address
        super().__init__(f"{what} at 0x{address:04X} is outside memory")


class StackOverflowError(Chip8Error):
    """Subroutine call with every stack slot in use."""


class StackUnderflowError(Chip8Error):
    """Return from subroutine with an empty stack."""


class ProgramTooLargeError(Chip8Error):
    """Program does not fit between 0x200 and the end of memory."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"program is {size} bytes, at most {limit} fit in memory")


class UnknownOpcodeError(Chip8Error):
    """Instruction word that does not decode to any CHIP-8 instruction."""

    def __init__(self, word: int, address: int):
        self.word = word
        self.address = address
        super().__init__(f"unknown opcode 0x{word:04X} at 0x{address:03X}")
