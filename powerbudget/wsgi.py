import uvicorn

from powerbudget.main import create_app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("powerbudget.wsgi:app", host="0.0.0.0", port=8000, reload=True)
