from .aggregation import accuracy_by_subject, class_counts_by_subject

__all__ = ["accuracy_by_subject", "class_counts_by_subject"]
