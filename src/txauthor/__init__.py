"""txauthor — fee-from-payment unsigned transaction authoring."""

__version__ = "0.1.0"
