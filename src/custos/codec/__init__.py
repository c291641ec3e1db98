"""
Codec - byte-level encodings shared by both chain families.

- rlp: Recursive Length Prefix encoding (account chains)
- numeric: decimal / hex string parsers producing big-endian bytes
"""
