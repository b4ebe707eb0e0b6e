"""MongoDB-backed storage for products, orders, coupons and migration records."""