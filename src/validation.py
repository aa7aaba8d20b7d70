from segment_codec import MASK64, MASK256, SEGMENT_COUNT


def is_zero_seed(value):
    return (value & MASK256) == 0


def is_zero_slice(value):
    return (value & MASK64) == 0


def is_valid_cursor(index, segment_count=SEGMENT_COUNT):
    return 0 <= index < segment_count
