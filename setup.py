from setuptools import setup


if __name__ == "__main__":

    with open("README.rst") as f:
        long_description = f.read()

    setup(
        classifiers=[
            "Environment :: Web Environment",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: MIT License",
            "Operating System :: OS Independent",
            "Programming Language :: Python",
            "Programming Language :: Python :: 3.7",
            "Programming Language :: Python :: 3.8",
            "Programming Language :: Python :: 3.9",
            "Programming Language :: Python :: Implementation :: CPython",
            "Programming Language :: Python :: Implementation :: PyPy",
            "Topic :: Internet :: WWW/HTTP",
            "Topic :: Software Development :: Libraries :: Python Modules",
        ],
        description="Immutable HTTP messages for Python",
        long_description=long_description,
        long_description_content_type="text/x-rst",
        python_requires=">=3.7",
        version="21.8.0",
        install_requires=[
            "attrs",
            "constantly",
            "hyperlink",
            "incremental",
            "Twisted>=16.6",
            "Werkzeug",
            "zope.interface",
        ],
        extras_require={
            "test": [
                "hypothesis>=6.100",
            ],
        },
        keywords="http request response uri stream psr-7",
        license="MIT",
        name="tidings",
        packages=["tidings", "tidings.test"],
        package_dir={"": "src"},
        package_data=dict(
            tidings=[],
        ),
        zip_safe=False,
    )
