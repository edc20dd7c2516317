"""Fixed-point Q7 neural network kernels and a small layer graph."""

__version__ = "0.1.0"

__all__ = [
    "activations",
    "convolution",
    "dense",
    "graph",
    "layers",
    "matrix_layers",
    "padding",
    "pool_layers",
    "pooling",
    "qmath",
    "rnn",
    "shapes",
]