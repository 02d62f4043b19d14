"""
Tests for the global strict switch.
"""

from procgraph import ProcessBuilder, StrictContext, get_strict_state, set_strict_state


class TestStrictState:
    """Switching unknown-process handling."""

    def test_default_is_lenient(self):
        """Unknown processes warn by default."""
        assert get_strict_state() is False

    def test_set_state(self):
        """The switch can be flipped."""
        set_strict_state(True)
        assert get_strict_state() is True
        set_strict_state(0)
        assert get_strict_state() is False

    def test_context_restores(self):
        """StrictContext restores the previous state."""
        with StrictContext(True):
            assert get_strict_state() is True
            with StrictContext(False):
                assert get_strict_state() is False
            assert get_strict_state() is True
        assert get_strict_state() is False

    def test_builder_setting_wins(self, catalog):
        """Builders with their own setting ignore the switch."""
        lenient = ProcessBuilder(catalog, strict=False)
        with StrictContext(True):
            assert lenient.strict is False
            assert ProcessBuilder(catalog).strict is True

    def test_children_inherit(self, catalog):
        """Nested builders follow their parent."""
        builder = ProcessBuilder(catalog, strict=True)
        node = builder.apply(None, lambda x, builder: builder.add(x, 1))
        assert node.callbacks()["process"].strict is True
