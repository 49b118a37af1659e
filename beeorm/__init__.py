"""Entity ORM building blocks: pager, where builder, local cache, ORM context, query loggers, locks and timestamp plugin."""

__version__ = "3.0.0"