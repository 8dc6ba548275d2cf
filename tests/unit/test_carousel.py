"""Unit tests for ImageCarousel."""

import random

import pytest

from restaurant_menu_site.services.carousel import ImageCarousel


@pytest.mark.unit
class TestImageCarousel:
    """Test suite for ImageCarousel."""

    def test_rejects_empty_sequence(self) -> None:
        """Test that a carousel needs at least one image."""
        with pytest.raises(ValueError):
            ImageCarousel(0)

    def test_next_wraps_at_end(self) -> None:
        """Test that next cycles from the last image to the first."""
        carousel = ImageCarousel(3)

        assert [carousel.next() for _ in range(4)] == [1, 2, 0, 1]

    def test_previous_wraps_at_start(self) -> None:
        """Test that previous cycles from the first image to the last."""
        carousel = ImageCarousel(3)

        assert [carousel.previous() for _ in range(4)] == [2, 1, 0, 2]

    def test_single_image_stays_at_zero(self) -> None:
        """Test that one image never moves and shows no controls."""
        carousel = ImageCarousel(1)

        assert carousel.next() == 0
        assert carousel.previous() == 0
        assert carousel.has_controls is False

    def test_starting_index_is_wrapped(self) -> None:
        """Test that out-of-range starting indexes wrap into range."""
        assert ImageCarousel(3, index=5).index == 2
        assert ImageCarousel(3, index=-1).index == 2

    def test_select_jumps_to_thumbnail(self) -> None:
        """Test selecting a thumbnail directly."""
        carousel = ImageCarousel(4)

        assert carousel.select(3) == 3
        assert carousel.next_index == 0
        assert carousel.previous_index == 2

    def test_index_always_in_range(self) -> None:
        """Test that any sequence of moves keeps the index in range."""
        rng = random.Random(7)
        for length in (1, 2, 5, 9):
            carousel = ImageCarousel(length)
            for _ in range(200):
                index = carousel.next() if rng.random() < 0.5 else carousel.previous()
                assert 0 <= index < length

    def test_instances_are_independent(self) -> None:
        """Test that each carousel keeps its own position."""
        first = ImageCarousel(3)
        second = ImageCarousel(3)

        first.next()

        assert first.index == 1
        assert second.index == 0
