from skybuild.cli import app

app(prog_name="skybuild")
