# api/tools/echo.py
meta = {
    "name": "Echo",
    "path": "/tools/echo?text=hello",
    "description": "Echo back the query string and JSON body",
    "method": "POST",
    "category": "Tools",
    "tags": ["debug"],
}


async def on_start(ctx):
    ctx.res.json({"query": ctx.query, "body": ctx.body})
