from docaction.cli.app import app

app()
