"""코어 패키지 — Core building blocks shared by repositories and services."""
