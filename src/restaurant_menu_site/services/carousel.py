"""Cyclic image index for item cards and the detail view."""


class ImageCarousel:
    """Index over an item's images that wraps in both directions."""

    def __init__(self, length: int, index: int = 0) -> None:
        """Initialize the carousel.

        Args:
            length: Number of images, must be positive
            index: Starting index, wrapped into range

        Raises:
            ValueError: If length is not positive
        """
        if length <= 0:
            raise ValueError("Carousel needs at least one image")
        self.length = length
        self.index = index % length

    def next(self) -> int:
        self.index = (self.index + 1) % self.length
        return self.index

    def previous(self) -> int:
        self.index = (self.index - 1 + self.length) % self.length
        return self.index

    def select(self, index: int) -> int:
        """Jump to a thumbnail; out-of-range indexes wrap."""
        self.index = index % self.length
        return self.index

    @property
    def next_index(self) -> int:
        return (self.index + 1) % self.length

    @property
    def previous_index(self) -> int:
        return (self.index - 1 + self.length) % self.length

    @property
    def has_controls(self) -> bool:
        """Navigation is only shown for more than one image."""
        return self.length > 1
