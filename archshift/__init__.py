"""archshift: source/target architecture planning and simulated cloud migration."""

__version__ = "0.1.0"
