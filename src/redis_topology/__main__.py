from redis_topology.cli import run


run()
