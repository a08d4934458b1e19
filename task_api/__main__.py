import uvicorn
from dotenv import load_dotenv

from task_api.core.config import get_settings


def main() -> None:
    # Load environment variables
    load_dotenv()
    settings = get_settings()
    uvicorn.run("task_api.main:app", host=settings.HOST, port=settings.PORT, reload=False)


if __name__ == "__main__":
    main()
