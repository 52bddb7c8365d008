"""Intent layer: normalization, classification, slot extraction and the deterministic fast path.

The layer turns free text about cards into typed slots, which the query layer assembles into search
syntax.
"""
