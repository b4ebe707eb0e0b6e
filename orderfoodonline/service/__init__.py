"""Business rules for listing products, placing orders and running migrations."""