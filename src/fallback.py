from segment_codec import MASK64, hash_words

EMERGENCY_TAG = b"emergency-output"


class FallbackGenerator:
    """
    Emergency values for when the primary derivation degenerates to zero.
    Outputs depend on the source's clock and marker, so repeated failures
    across blocks still yield distinct values.
    """

    def __init__(self, source, engine_id):
        self.source = source
        self.engine_id = engine_id

    def emergency_output(self, salt, request_counter, zero_seed_errors, zero_slice_errors, caller=b""):
        value = hash_words(
            self.source.timestamp(),
            self.source.current_marker(),
            caller,
            self.engine_id,
            salt,
            request_counter,
            zero_seed_errors,
            zero_slice_errors,
        )
        if value == 0:
            value = hash_words(EMERGENCY_TAG, request_counter)
        return value

    def fallback_seed(self):
        return hash_words(self.source.timestamp(), self.source.current_marker(), 0)

    def fallback_slice(self, segment_index):
        return (hash_words(self.source.timestamp(), segment_index) & MASK64) or 1
