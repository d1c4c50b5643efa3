# Todo REST API layer.
# Created: 2026-10-18
#
# create_app() in todoapi.api.app wires the todos router, auth, CORS, error
# handlers and the /api-docs page onto a FastAPI app.
