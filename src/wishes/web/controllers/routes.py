from aiohttp import web

from wishes.web.controllers import version, wishes


def register_routes(app: web.Application):
    # Method dispatch is done by the controller to return JSON 405 responses
    app.router.add_route("*", "/api/wishes", wishes.wishes_endpoint)

    app.router.add_get("/version", version.version)
    app.router.add_get("/api/v0/version", version.version)
