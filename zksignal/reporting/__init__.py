from .plots import plot_regression

__all__ = ["plot_regression"]
