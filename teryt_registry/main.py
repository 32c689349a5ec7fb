from teryt_registry.app.main import create_app

app = create_app()
