"""Food-ordering HTTP service: product catalogue, orders, coupons, migrations and metrics."""

__version__ = "0.1.0"