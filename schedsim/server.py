"""
HTTP front end for the simulator.

Endpoints:
 - POST /simulate   run one simulation and return timeline + metrics
 - GET  /algorithms list accepted algorithm names
 - GET  /health     liveness check
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from .algorithms import ALGORITHM_NAMES, simulate
from .config import CORS_EXPOSE_HEADERS, CORS_HEADERS, CORS_METHODS, ServerConfig
from .errors import SchedulerError
from .validation import validate_request
from .workload_io import request_from_mapping, result_to_payload

logger = logging.getLogger(__name__)


def create_app(config: Optional[ServerConfig] = None) -> Flask:
    config = config or ServerConfig()

    app = Flask(__name__)
    app.config["SCHEDSIM"] = config
    CORS(
        app,
        origins=config.cors_origins,
        methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        expose_headers=CORS_EXPOSE_HEADERS,
        supports_credentials=True,
        max_age=config.cors_max_age,
    )

    @app.route("/health", methods=["GET"])
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "schedsim"})

    @app.route("/algorithms", methods=["GET"])
    def algorithms():
        return jsonify({
            "algorithms": list(ALGORITHM_NAMES),
            "preemptive": ["SJF", "Priority"],
        })

    @app.route("/simulate", methods=["POST"])
    def simulate_route():
        data = request.get_json(silent=True)
        if data is None:
            logger.warning("[API] Rejected /simulate: body is not JSON")
            return jsonify({"error": "Invalid request format"}), 400

        try:
            req = request_from_mapping(data)
            validate_request(req)
        except SchedulerError as exc:
            logger.warning(f"[API] Rejected /simulate: {exc}")
            return jsonify({"error": str(exc)}), 400

        result = simulate(
            req.processes,
            req.algorithm,
            is_preemptive=req.is_preemptive,
            time_quantum=req.time_quantum,
        )
        logger.info(
            f"[API] {result.algorithm}: {len(result.processes)} processes, "
            f"{len(result.timeline)} segments, makespan {result.system.makespan}"
        )
        return jsonify(result_to_payload(result))

    return app


def run_server(config: ServerConfig) -> None:
    app = create_app(config)
    logger.info(f"Starting schedsim server on {config.host}:{config.port}")
    app.run(host=config.host, port=config.port)
