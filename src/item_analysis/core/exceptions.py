"""
Error kinds raised by the item analysis pipeline.

Integrity and model-fit errors are fatal to a run. An undefined statistic
is recovered by the statistics engine as a missing value.
"""


class ItemAnalysisError(Exception):
    pass


class MalformedResponseError(ItemAnalysisError):
    """A response uses symbols outside the item's valid alphabet."""

    def __init__(self, item_id: str, person_id: str, raw: str) -> None:
        self.item_id = item_id
        self.person_id = person_id
        self.raw = raw
        super().__init__(
            f"Malformed response {raw!r} from person {person_id!r} "
            f"on item {item_id!r}"
        )


class ModelFitError(ItemAnalysisError):
    """Latent trait estimation failed or the score matrix is degenerate."""


class UndefinedStatisticError(ItemAnalysisError):
    """A correlation or variance is mathematically undefined."""
