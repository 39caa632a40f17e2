from beanie import Document


class Counter(Document):
    """Named monotonically increasing sequence"""
    name: str
    value: int = 0

    class Settings:
        name = "counters"
        indexes = [
            "name",
        ]
