"""Azure Functions entrypoints: Event Grid blob-created ingestion and the drop endpoint."""
import os

import azure.functions as func

from blob_order_loader.app import configure_logging, drop_orders, save_orders

configure_logging(os.environ.get("LOG_LEVEL", "INFO"))

app = func.FunctionApp()

app.event_grid_trigger(arg_name="event")(save_orders)
app.route(route="dropOrders", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)(drop_orders)
