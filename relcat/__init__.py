"""GitOps release catalog: environments, releases and promotions."""

__version__ = "0.1.0"
