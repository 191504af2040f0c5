"""레포지토리 카탈로그 서버 패키지.

Repository catalog server package.
Generic filter/pagination query engine over async SQLAlchemy, with the
tracked GitHub repository catalog built on top of it.
"""
