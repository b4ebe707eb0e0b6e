# orderfoodonline

A small HTTP service for a food-ordering shop. It serves a product
catalogue, accepts orders, checks promo codes, seeds its database from
JSON migration files and keeps Prometheus-style metrics. Storage is
MongoDB (through `pymongo`) and the web layer is Flask.

## What it serves

Once a `Router` has been initialised with its dependencies, its Flask
application answers:

| Method | Path                         | Auth | Purpose                                         |
|--------|------------------------------|------|-------------------------------------------------|
| GET    | `/api/health`                | no   | Liveness check, answers `"Healthy"`             |
| GET    | `/api/version`               | no   | `{"version": ..., "commit_hash": ...}`          |
| GET    | `/metrics`                   | no   | Metrics in the Prometheus text format           |
| GET    | `/api/product`               | yes  | List every product                              |
| GET    | `/api/product/<productId>`   | yes  | One product; 400 for a blank id, 404 if unknown |
| POST   | `/api/order`                 | yes  | Place an order                                  |
| GET    | `/api/swagger.json`          | no   | API description (`env == "local"` only)         |
| GET    | `/swagger/...`               | no   | A page linking to the API description (local)   |

Authenticated routes expect the API key in an `api_key` request header.
A missing or blank key is answered with 401 `"API key required"`, a wrong
key with 401 `"Invalid API key"`.

Every request also passes through:

* metrics recording (count and duration, labelled by method, route and
  status code);
* a per-client rate limiter: 300 requests, refilled once five minutes
  pass without a request from that client; beyond that the answer is 429
  with a "Too many requests. Try again in ..." message. The client is
  identified by `X-Forwarded-For`, then `X-Real-IP`, then the remote
  address;
* a handler that answers any `OPTIONS` request with 204 and permissive
  CORS headers;
* CORS headers on responses to cross-origin requests (those whose
  `Origin` differs from the host), with `Access-Control-Allow-Origin: *`.

## Orders and promo codes

An order request looks like this:

```json
{
  "couponCode": "SAVE20OFF",
  "items": [
    {"productId": "1", "quantity": 2},
    {"productId": "2", "quantity": 1}
  ]
}
```

* A body that is not JSON, has fields of the wrong type, or has an empty
  `items` list is rejected with 400 `"Invalid input"`.
* A promo code, when given and not blank, must be 8 to 10 bytes long
  after trimming, and must appear among the active coupons of at least
  two distinct coupon files; otherwise the answer is 422.
* An item with no product id or a quantity below 1 gives 422.
* A product id that is not in the catalogue gives 404.
* Any other failure gives 500 `"Failed to place an order"`.
* On success the stored order is returned with its new id, the items
  and the matching products.

At the service level these outcomes are exceptions from
`orderfoodonline.errors`: `InvalidPromoCodeError`,
`InvalidProductOrQuantityError`, `ProductNotFoundError`,
`FindProductByIdError` and `ProductListingError`, all subclasses of
`ServiceError`.

## Wiring it together

```python
import logging

from orderfoodonline.repository.base import Repository
from orderfoodonline.repository.products import MongoProductRepository
from orderfoodonline.repository.orders import MongoOrderRepository
from orderfoodonline.repository.coupons import MongoCouponRepository
from orderfoodonline.service.product_service import ProductService
from orderfoodonline.service.order_service import OrderService
from orderfoodonline.service.migrations import MigrationService
from orderfoodonline.web.handlers import OrderHandler, ProductHandler, SwaggerHandler
from orderfoodonline.web.middlewares import AuthMiddleware, MetricsMiddleware
from orderfoodonline.web.routes import Dependencies, Router, ServerSettings

logger = logging.getLogger("orderfoodonline")

repository = Repository.connect("mongodb", "localhost", 27017, "orderfoodonline")

products = MongoProductRepository(repository)
orders = MongoOrderRepository(repository)
coupons = MongoCouponRepository(repository)

MigrationService(products, logger).run_migrations("migrations")

product_service = ProductService(products, logger)
order_service = OrderService(orders, products, coupons, logger)

deps = Dependencies(
    swagger_handler=SwaggerHandler("docs/swagger.json", logger),
    auth_middleware=AuthMiddleware(logger),
    metrics_middleware=MetricsMiddleware(),
    product_handler=ProductHandler(product_service),
    order_handler=OrderHandler(order_service),
)

router = Router(ServerSettings(host="127.0.0.1", port=8080, env="local"), logger)
router.init(deps)
router.run()          # serves until SIGINT or SIGTERM, then shuts down

repository.close()
```

`Repository` is also a context manager that closes the connection on
exit. `router.app` is the Flask application, which can be handed to any
WSGI server or exercised with Flask's test client.
`validate_dependencies(deps)` raises `ValueError` naming the first of
the auth middleware, metrics middleware, product handler or swagger
handler that is missing. `SwaggerHandler` reads its file once and raises
`OSError` if it cannot.

## Migrations

Migration files are JSON documents named like
`0001_init_product_catalog.json`: a four-digit version, an underscore and
a description. Each holds a `version`, a `description` and a list of
`products`. Files are applied in name order, products are inserted in
batches of 100, and each applied file is recorded (status `in_progress`,
then `completed`) so that its version is skipped next time. A migration
whose products cannot be inserted is recorded with the status `failed`
and `run_migrations` raises `RuntimeError`.

## Metrics

`orderfoodonline.metrics` keeps counters and histograms for HTTP
requests, database queries and order processing, and a gauge for active
database connections. `render_all()` returns them all in the Prometheus
text exposition format, which is what `/metrics` serves.

## What it does not do

The package has no command-line entry point and does not read a
configuration file or environment variables: connection details,
server settings and the path of the API description are passed in by
the code that wires the pieces together, as above. The `/swagger/` page
is a plain link to `/api/swagger.json`, not an interactive viewer.