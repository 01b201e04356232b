"""
Point d'entrée de Watchman Host Metadata

Modes :
- service : envoi au démarrage puis toutes les 30 minutes, jusqu'à SIGINT/SIGTERM
- once : un seul envoi (avec tentatives), code de retour selon le résultat
- show : construit le document et l'affiche sans l'envoyer
"""

import json
import signal
import sys
import argparse
import threading

from hostmeta.collectors.source import ChainSourceProvider, ConfigSourceProvider, SystemSourceProvider
from hostmeta.core.config import AgentConfig, BuildInfo, create_default_config
from hostmeta.core.errors import InvalidPatternError
from hostmeta.core.logger import AgentLogger
from hostmeta.core.metadata import HostProbes
from hostmeta.core.scheduler import HostMetadataPusher


class HostMetadataAgent:
    """
    Agent principal d'envoi des métadonnées d'hôte

    Cette classe assemble la configuration, le logging, le fournisseur de
    hostname et le planificateur d'envoi.
    """

    def __init__(self, config_path=None):
        """
        Initialise l'agent

        Args:
            config_path: Chemin vers le fichier de configuration

        Raises:
            InvalidPatternError: Si une expression de tag_attributes est invalide
        """
        self.config = AgentConfig(config_path)

        self.logger = AgentLogger(self.config)
        self.app_logger = self.logger.get_logger()

        self.pcfg = self.config.get_push_config()
        self.build_info = BuildInfo()

        self.probes = HostProbes.default(self.app_logger)

        self.pusher = HostMetadataPusher(
            self.pcfg,
            self.build_info,
            self.logger,
            self.build_source_provider(),
            self.config.get_resource_attributes(),
            probes=self.probes
        )

        self.shutdown_event = threading.Event()

        self.app_logger.info("Watchman Host Metadata initialisé")

    def build_source_provider(self) -> ChainSourceProvider:
        """
        Fournisseur de hostname : configuration, puis système

        Returns:
            ChainSourceProvider: Chaîne de fournisseurs
        """
        return ChainSourceProvider(
            [
                ConfigSourceProvider(self.pcfg.hostname),
                SystemSourceProvider(self.probes.system),
            ],
            self.app_logger
        )

    def run_service_mode(self):
        """
        Lance l'agent en mode service

        Envoi immédiat puis périodique jusqu'à réception de SIGINT/SIGTERM.
        """
        self.app_logger.info("Démarrage de Watchman Host Metadata en mode service")
        self.logger.log_config_info(self.config)

        self._setup_signal_handlers()

        try:
            self.pusher.start(self.shutdown_event)
            self.app_logger.info("Appuyez sur Ctrl+C pour arrêter l'agent")

            while not self.shutdown_event.is_set():
                self.shutdown_event.wait(timeout=1.0)

        except KeyboardInterrupt:
            self.app_logger.info("Interruption clavier détectée")
        finally:
            self.shutdown()

    def push_once(self) -> bool:
        """
        Construit le document et l'envoie une seule fois

        Returns:
            bool: True si l'envoi a abouti
        """
        self.app_logger.info("=== Envoi unique des métadonnées d'hôte ===")
        document = self.pusher.build_document()
        return self.pusher.push_with_retry(document)

    def show_document(self) -> dict:
        """
        Construit le document sans l'envoyer

        Returns:
            dict: Document au format de l'intake
        """
        return self.pusher.build_document().as_dict()

    def _setup_signal_handlers(self):
        """
        SIGINT, SIGTERM (et SIGBREAK sous Windows) lèvent shutdown_event
        """
        def signal_handler(signum, frame):
            self.app_logger.info(f"Signal {signal.Signals(signum).name} reçu - Arrêt en cours...")
            self.shutdown_event.set()

        for name in ('SIGTERM', 'SIGINT', 'SIGBREAK'):
            if hasattr(signal, name):
                signal.signal(getattr(signal, name), signal_handler)

    def shutdown(self):
        """
        Arrête proprement l'agent
        """
        self.app_logger.info("Arrêt de Watchman Host Metadata...")
        self.shutdown_event.set()
        self.pusher.stop()
        self.app_logger.info("Watchman Host Metadata arrêté proprement")


def main():
    """
    Analyse la ligne de commande et exécute le mode demandé

    Returns:
        int: Code de sortie (0 succès, 1 échec)
    """
    parser = argparse.ArgumentParser(
        description="Watchman Host Metadata - Envoi périodique des métadonnées d'hôte"
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Chemin vers le fichier de configuration'
    )

    parser.add_argument(
        '--mode', '-m',
        choices=['service', 'once', 'show'],
        default='service',
        help="Mode de fonctionnement de l'agent"
    )

    parser.add_argument(
        '--create-config',
        action='store_true',
        help='Crée un fichier de configuration par défaut'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Valide la configuration actuelle'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        help='Fichier de sortie pour le document (mode show)'
    )

    args = parser.parse_args()

    if args.create_config:
        if not args.config:
            print("❌ --config est requis avec --create-config")
            return 1
        create_default_config(args.config)
        print(f"✅ Configuration par défaut créée: {args.config}")
        return 0

    if args.validate_config:
        if AgentConfig(args.config).validate():
            print("✅ Configuration valide")
            return 0
        print("❌ Configuration invalide")
        return 1

    # show n'envoie rien : la clé d'API n'y est pas requise
    if args.mode in ('service', 'once') and not AgentConfig(args.config).validate():
        print("❌ Configuration invalide")
        return 1

    try:
        agent = HostMetadataAgent(args.config)
    except (InvalidPatternError, ValueError) as e:
        print(f"❌ Erreur de configuration: {e}")
        return 1

    if args.mode == 'service':
        agent.run_service_mode()

    elif args.mode == 'once':
        if agent.push_once():
            print("✅ Métadonnées envoyées")
        else:
            print("❌ Échec de l'envoi des métadonnées")
            return 1

    elif args.mode == 'show':
        document = agent.show_document()
        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            print(f"✅ Document sauvegardé dans: {args.output}")
        else:
            print(json.dumps(document, indent=2, ensure_ascii=False))

    return 0


if __name__ == '__main__':
    sys.exit(main())
