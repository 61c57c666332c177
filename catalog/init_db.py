from catalog.config import get_settings
from catalog.infra.db import create_db_engine
from catalog.infra.models import create_schema


def main():
    engine = create_db_engine(get_settings())
    try:
        create_schema(engine)
    finally:
        engine.dispose()
    print("Tabelas criadas!")


if __name__ == "__main__":
    main()
