import unittest

from bbpe.byte_mapping import ByteMapping


class TestByteMapping(unittest.TestCase):
    def setUp(self):
        self.mapping = ByteMapping()

    def test_bijection(self):
        for b in range(256):
            self.assertEqual(self.mapping.to_byte(self.mapping.to_symbol(b)), b)
        self.assertEqual(len(set(self.mapping.byte_to_symbol)), 256)
        self.assertEqual(len(self.mapping.symbol_to_byte), 256)

    def test_printable_bytes_map_to_themselves(self):
        for b in list(range(33, 127)) + list(range(161, 173)) + list(range(174, 256)):
            self.assertEqual(self.mapping.to_symbol(b), b)

    def test_shifted_bytes(self):
        # Bytes 0-32 are shifted first, in order
        self.assertEqual(self.mapping.to_symbol(0), 256)
        self.assertEqual(self.mapping.to_symbol(10), 266)
        self.assertEqual(self.mapping.symbol_of(10), "Ċ")
        self.assertEqual(self.mapping.to_symbol(32), 288)
        self.assertEqual(self.mapping.symbol_of(32), "Ġ")

        # Then 127-160, then the soft hyphen
        self.assertEqual(self.mapping.to_symbol(127), 289)
        self.assertEqual(self.mapping.to_symbol(160), 322)
        self.assertEqual(self.mapping.to_symbol(173), 323)

    def test_to_byte(self):
        self.assertEqual(
            self.mapping.to_byte(256),
            0,
            msg="Byte 0 must be distinguishable from an unmapped code point!",
        )
        self.assertIsNone(self.mapping.to_byte(0))
        self.assertIsNone(self.mapping.to_byte(32))
        self.assertIsNone(self.mapping.to_byte(324))
        self.assertIsNone(self.mapping.to_byte(ord("你")))

    def test_encode(self):
        self.assertEqual(self.mapping.encode(b" hi\n"), "ĠhiĊ")
        self.assertEqual(self.mapping.encode("é".encode("utf-8")), "Ã©")
        self.assertEqual(self.mapping.encode(b""), "")

    def test_out_of_range(self):
        self.assertRaises(ValueError, self.mapping.to_symbol, 256)
        self.assertRaises(ValueError, self.mapping.to_symbol, -1)
        self.assertRaises(ValueError, self.mapping.symbol_of, 1000)


if __name__ == "__main__":
    unittest.main()
