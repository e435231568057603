import sys


def main():
    from artsoul.config import settings

    print("🎨 Starting ArtSoul School Matcher...")
    print(f"🌐 Server: http://localhost:{settings.PORT}")
    print(f"📖 API Docs: http://localhost:{settings.PORT}/docs")
    print("=" * 50)

    try:
        import uvicorn

        uvicorn.run(
            "artsoul.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.RELOAD,
            log_level=settings.LOG_LEVEL.lower()
        )

    except Exception as e:
        print(f"❌ Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
