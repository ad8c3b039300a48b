import logging

import click
from flask import Flask, jsonify

from vrfgame.crypto.keys import KeyMaterial
from vrfgame.program.processor import Runtime
from vrfgame.program.store import AccountStore

from config import Config
from vrf_routes import vrf_bp, init_vrf_bp


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.from_prefixed_env("VRFGAME")

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = AccountStore.open(app.config["DB_PATH"])
    runtime = Runtime(store)
    app.extensions["vrfgame"] = runtime

    init_vrf_bp(runtime)
    app.register_blueprint(vrf_bp)

    @app.route("/")
    def main():
        return jsonify({"service": "vrfgame", "accounts": len(store.ids())})

    @app.cli.command("keygen")
    @click.option("--seed", default=None, help="Deterministic seed (testing only)")
    def keygen(seed):
        """Generate a VRF / signing keypair."""
        keys = KeyMaterial.generate(seed=seed)
        click.echo(f"public: {keys.public_bytes.hex()}")
        click.echo(f"secret: {keys.secret_bytes().hex()}")

    return app


if __name__ == "__main__":
    create_app().run()
