import logging

from api.app import create_app, prepare_config
from core.settings import get_settings

config = prepare_config(get_settings())

logging.basicConfig(
    level=config.runtime.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app(config)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.api.host, port=config.api.port)
