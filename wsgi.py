from poi_sync import create_app
from config import Config

app = create_app(Config)

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(Config.PORT), threaded=True)
