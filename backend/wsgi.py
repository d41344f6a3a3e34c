# Entry point for `flask --app wsgi run` and WSGI servers.

from verger import create_app

app = create_app()

if __name__ == "__main__":
    app.run(port=3000)
