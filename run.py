import uvicorn
from studio.core.config import settings


if __name__ == "__main__":
    uvicorn.run(
        "studio.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.uvicorn_reload,  # 生产环境应关闭
        log_level=settings.log_level.lower(),
        workers=settings.uvicorn_workers,
        loop="asyncio"
    )
