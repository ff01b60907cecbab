"""WasteMap - garbage overflow heatmap reconciliation."""

__version__ = "0.1.0"
