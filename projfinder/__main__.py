from projfinder.main import entrypoint

entrypoint()
