"""
Start the Fiscozen parser backend locally.

Usage:
    python demo_endpoint.py
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting Fiscozen Parser Backend")
    print("=" * 60)
    print()
    print("📌 API Endpoints:")
    print("   - Health Check:  GET  http://localhost:8000/health")
    print("   - Login:         POST http://localhost:8000/api/fiscozen/login")
    print("   - Workflow:      POST http://localhost:8000/api/fiscozen/workflow")
    print("   - API Docs:           http://localhost:8000/docs")
    print()
    print("🔐 Fiscozen session:")
    print("   Log in first; then optionally send")
    print("   Authorization: Bearer <token from /login>")
    print()
    print("=" * 60)
    print("Starting server on http://localhost:8000")
    print("=" * 60)
    print()

    uvicorn.run(
        "fiscozen_parser.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
