from diagram_studio.cli import app

app()
