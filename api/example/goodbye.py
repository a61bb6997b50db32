# api/example/goodbye.py
meta = {
    "name": "Goodbye API",
    "path": "/example/goodbye",
    "description": "A simple goodbye API endpoint",
    "method": "GET",
    "category": "Example",
    "author": "Mr Ntando ofc",
}


async def on_start(ctx):
    return {"message": "Goodbye, world!"}
