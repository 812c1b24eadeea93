"""Front-ends for the engine: REST API and terminal."""
