from conscript.server import create_app

app = create_app()
