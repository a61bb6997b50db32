# api/example/hello.py
meta = {
    "name": "Hello API",
    "path": "/example/hello",
    "description": "A simple hello API endpoint",
    "method": "GET",
    "category": "Example",
    "author": "Mr Ntando Ofc",
}


async def on_start(ctx):
    ctx.res.json({"message": "Hello, world!"})
