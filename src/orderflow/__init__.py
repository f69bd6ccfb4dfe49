"""orderflow: linear Step Functions workflow orchestration."""

__version__ = "0.1.0"
