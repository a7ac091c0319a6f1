from setuptools import setup, find_packages

setup(
    name="gadgetstore",
    version="1.0.0",
    packages=find_packages(include=["gadgetstore", "gadgetstore.*"]),
    install_requires=[
        "django>=4.2",
        "djangorestframework",
        "drf-spectacular",
        "djangorestframework-simplejwt",
        "django-cors-headers",
        "psycopg2-binary",
        "python-decouple",
        "requests",
        "cloudinary",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-django",
        ],
    },
    python_requires=">=3.11",
)
