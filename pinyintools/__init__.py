"""Custom phrases, dictionary file lists, import pipelines and Sogou link handling for pinyin input."""

__version__ = "0.1.0"
__all__ = ["customphrase", "customphrasemodel", "filelistmodel", "pipeline", "jobs", "sogou"]