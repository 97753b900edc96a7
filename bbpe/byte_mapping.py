class ByteMapping:
    """Reversible mapping between the 256 byte values and printable unicode symbols.

    Byte-level BPE does not merge raw bytes directly. Every byte is first replaced
    by a "safe" unicode code point so that the vocabulary can be stored as ordinary
    strings: bytes that are already printable Latin-1 characters map to themselves,
    and every other byte (control characters, the space, the soft hyphen, ...) is
    shifted to a code point starting at 256. For example, the space (32) becomes
    'Ġ' (288) and the newline (10) becomes 'Ċ' (266).

    Because the mapping is a bijection, decoding simply looks each code point of a
    token back up to recover the original byte.
    """

    def __init__(self):
        self.byte_to_symbol: list[int] = []  # Index is the byte value
        self.symbol_to_byte: dict[int, int] = {}  # Sparse: only mapped code points

        n = 0  # Number of bytes shifted so far
        for b in range(256):
            if self.is_printable(b):
                cp = b
            else:
                cp = 256 + n
                n += 1
            self.byte_to_symbol.append(cp)
            self.symbol_to_byte[cp] = b

        # One-character strings, used to look up the initial token of each byte
        self.byte_symbols: list[str] = [chr(cp) for cp in self.byte_to_symbol]

    @staticmethod
    def is_printable(b: int) -> bool:
        return 33 <= b <= 126 or 161 <= b <= 172 or 174 <= b <= 255

    def to_symbol(self, b: int) -> int:
        if not 0 <= b < 256:
            raise ValueError(f"Not a byte value: {b}")
        return self.byte_to_symbol[b]

    def to_byte(self, cp: int) -> int | None:
        """Return the byte represented by code point `cp`, or None if `cp` is not
        one of the 256 byte symbols.
        """
        return self.symbol_to_byte.get(cp)

    def symbol_of(self, b: int) -> str:
        if not 0 <= b < 256:
            raise ValueError(f"Not a byte value: {b}")
        return self.byte_symbols[b]

    def encode(self, data: bytes) -> str:
        """Map every byte of `data` to its symbol."""
        return "".join(self.byte_symbols[b] for b in data)
