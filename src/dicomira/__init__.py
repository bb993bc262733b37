"""dicomira: reconstruct DICOM slice stacks into resliceable 3D volumes."""

__version__ = "0.1.0"
