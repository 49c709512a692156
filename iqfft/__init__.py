"""Pure-Python mixed-radix FFTs, fast FIR filtering, PSD images and IQ spectrogram processing."""

__version__ = "0.1.0"