"""Точка входа в приложение."""
import logging

from maskstudio.app import MaskStudioApp
from maskstudio.config import load_config


def main() -> None:
    """Читает настройки, настраивает логирование и запускает главное окно."""
    config = load_config()
    logging.basicConfig(level=config.log_level, format="%(asctime)s - %(levelname)s - %(message)s")
    app = MaskStudioApp(config)
    app.mainloop()


if __name__ == "__main__":
    main()
