"""Flask handlers, middlewares and routing for the service."""