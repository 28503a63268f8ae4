"""roiplan: real-estate payment plan and purchase scenario engine."""

__version__ = "0.1.0"
