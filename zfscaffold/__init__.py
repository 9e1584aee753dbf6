"""zfscaffold -- scaffolding for Zend Framework 2 applications."""

__version__ = "0.1.0"
