from conftest import SEED, SEED_BYTES
from segment_codec import (
    MASK64,
    SEGMENT_BITS,
    SEGMENT_COUNT,
    extract,
    extract_lowest,
    hash_words,
    pack_words,
    split_segments,
)
from validation import is_valid_cursor, is_zero_seed, is_zero_slice


def test_extract_matches_big_endian_slicing() -> None:
    for index in range(SEGMENT_COUNT):
        end = len(SEED_BYTES) - 8 * index
        expected = int.from_bytes(SEED_BYTES[end - 8:end], "big")
        assert extract(SEED, index * SEGMENT_BITS) == expected

    assert extract(SEED, 0) == 0x5566778899001122
    assert extract(SEED, 64) == 0x9900112233445566
    assert extract(SEED, 128) == 0x7788990011223344
    assert extract(SEED, 192) == 0x1122334455667788


def test_extract_lowest_is_shift_zero() -> None:
    assert extract_lowest(SEED) == extract(SEED, 0)
    assert extract_lowest((1 << 256) - 1) == MASK64


def test_split_segments_orders_by_cursor() -> None:
    segments = split_segments(SEED)
    assert len(segments) == SEGMENT_COUNT
    assert segments == tuple(extract(SEED, i * 64) for i in range(4))
    assert split_segments(1 << 64) == (0, 1, 0, 0)


def test_pack_words_encodes_ints_as_words_and_bytes_verbatim() -> None:
    packed = pack_words(1, b"\xab\xcd")
    assert len(packed) == 34
    assert packed[:32] == (1).to_bytes(32, "big")
    assert packed[32:] == b"\xab\xcd"


def test_hash_words_is_keccak256() -> None:
    # Keccak-256 of the empty string
    assert hash_words() == 0xC5D2460186F7233C927E7DB2DCC703C0E500B653CA82273B7BFAD8045D85A470
    assert hash_words(1, 2) != hash_words(2, 1)


def test_zero_predicates() -> None:
    assert is_zero_seed(0)
    assert not is_zero_seed(SEED)
    assert is_zero_slice(0)
    assert is_zero_slice(1 << 64)
    assert not is_zero_slice(1)


def test_valid_cursor() -> None:
    assert all(is_valid_cursor(i) for i in range(SEGMENT_COUNT))
    assert not is_valid_cursor(SEGMENT_COUNT)
    assert not is_valid_cursor(-1)
    assert is_valid_cursor(4, segment_count=5)
