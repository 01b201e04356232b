"""
Collecteur matériel et logiciel (payload "gohai")

Ce module assemble la description matérielle de la machine :
- Processeur (CPU)
- Mémoire (RAM et swap)
- Systèmes de fichiers
- Réseau (adresses principales et interfaces)
- Plateforme (OS, noyau, architecture)

Le résultat est sérialisé en chaîne JSON sous la clé "gohai", format
attendu par l'intake.
"""

import json
import platform
import socket
import sys
from typing import Any, Dict, List

import psutil

from .base import BaseCollector


class HardwareCollector(BaseCollector):
    """
    Collecteur des informations matérielles de l'hôte

    Utilise principalement psutil ; les valeurs sont exprimées sous forme
    de chaînes comme dans le format gohai.
    """

    def collect(self) -> Dict[str, Any]:
        """
        Collecte toutes les informations matériel

        Returns:
            dict: {"gohai": "<json>"}
        """
        self._start_collection()

        gohai = {
            'cpu': self._collect_cpu_info(),
            'memory': self._collect_memory_info(),
            'filesystem': self._collect_filesystem_info(),
            'network': self._collect_network_info(),
            'platform': self._collect_platform_info(),
        }

        self._end_collection()
        return {'gohai': json.dumps(gohai, sort_keys=True, separators=(',', ':'))}

    def _collect_cpu_info(self) -> Dict[str, str]:
        """
        Collecte les informations CPU

        Returns:
            dict: Informations du processeur
        """
        cpu_info = {}

        cores = self._safe_execute(
            lambda: psutil.cpu_count(logical=False),
            "Erreur récupération cores physiques"
        )
        if cores:
            cpu_info['cpu_cores'] = str(cores)

        logical = self._safe_execute(
            lambda: psutil.cpu_count(logical=True),
            "Erreur récupération cores logiques"
        )
        if logical:
            cpu_info['cpu_logical_processors'] = str(logical)

        cpu_freq = self._safe_execute(
            psutil.cpu_freq,
            "Erreur récupération fréquence CPU"
        )
        if cpu_freq:
            cpu_info['mhz'] = f"{cpu_freq.current:.3f}"

        cpu_info.update(self._get_platform_cpu_info())
        return cpu_info

    def _get_platform_cpu_info(self) -> Dict[str, str]:
        """
        Modèle et fabricant du processeur selon la plateforme

        Returns:
            dict: model_name, vendor_id, family...
        """
        cpu_info = {}

        if sys.platform.startswith("linux"):
            content = self._read_file('/proc/cpuinfo')
            if content:
                field_mapping = {
                    'model name': 'model_name',
                    'vendor_id': 'vendor_id',
                    'cpu family': 'family',
                    'model': 'model',
                    'stepping': 'stepping',
                    'cache size': 'cache_size',
                }
                for line in content.splitlines():
                    if ':' not in line:
                        continue
                    key, value = line.split(':', 1)
                    info_key = field_mapping.get(key.strip())
                    # Premier processeur seulement
                    if info_key and info_key not in cpu_info:
                        cpu_info[info_key] = self._clean_string(value)

        if 'model_name' not in cpu_info:
            model = platform.processor()
            if model:
                cpu_info['model_name'] = self._clean_string(model)

        return cpu_info

    def _collect_memory_info(self) -> Dict[str, str]:
        """
        Collecte les informations mémoire

        Returns:
            dict: Mémoire totale et swap, en kB
        """
        memory_info = {}

        virtual_mem = self._safe_execute(
            psutil.virtual_memory,
            "Erreur récupération mémoire virtuelle"
        )
        if virtual_mem:
            memory_info['total'] = f"{virtual_mem.total // 1024}kB"

        swap_mem = self._safe_execute(
            psutil.swap_memory,
            "Erreur récupération mémoire swap"
        )
        if swap_mem:
            memory_info['swap_total'] = f"{swap_mem.total // 1024}kB"

        return memory_info

    def _collect_filesystem_info(self) -> List[Dict[str, str]]:
        """
        Collecte les systèmes de fichiers montés

        Returns:
            list: Partitions avec taille (kB) et point de montage
        """
        filesystems = []

        partitions = self._safe_execute(
            lambda: psutil.disk_partitions(all=False),
            "Erreur récupération partitions",
            []
        )

        for partition in partitions:
            try:
                disk_usage = psutil.disk_usage(partition.mountpoint)
            except OSError as e:
                # Partition non accessible
                self.logger.debug(f"Partition {partition.mountpoint} ignorée: {e}")
                continue

            filesystems.append({
                'kb_size': str(disk_usage.total // 1024),
                'mounted_on': partition.mountpoint,
                'name': partition.device,
            })

        return filesystems

    def _collect_network_info(self) -> Dict[str, Any]:
        """
        Collecte les adresses réseau principales et les interfaces

        Returns:
            dict: ipaddress, ipaddressv6, macaddress, interfaces
        """
        network_info: Dict[str, Any] = {}
        interfaces = []

        addresses = self._safe_execute(
            psutil.net_if_addrs,
            "Erreur récupération interfaces réseau",
            {}
        )

        for interface_name in sorted(addresses):
            interface = {'name': interface_name}
            for addr in addresses[interface_name]:
                if addr.family == socket.AF_INET:
                    interface.setdefault('ipv4', []).append(addr.address)
                elif addr.family == socket.AF_INET6:
                    interface.setdefault('ipv6', []).append(addr.address.split('%')[0])
                elif addr.family == psutil.AF_LINK:
                    interface['macaddress'] = addr.address
            interfaces.append(interface)

            # Première interface non locale : adresses principales
            if interface_name.startswith('lo') or 'ipv4' not in interface:
                continue
            if 'ipaddress' not in network_info:
                network_info['ipaddress'] = interface['ipv4'][0]
                if interface.get('ipv6'):
                    network_info['ipaddressv6'] = interface['ipv6'][0]
                if interface.get('macaddress'):
                    network_info['macaddress'] = interface['macaddress']

        network_info['interfaces'] = interfaces
        return network_info

    def _collect_platform_info(self) -> Dict[str, str]:
        """
        Collecte les informations de plateforme

        Returns:
            dict: Système, noyau, architecture, version Python
        """
        uname = platform.uname()
        return {
            'hostname': uname.node,
            'os': sys.platform,
            'kernel_name': uname.system,
            'kernel_release': uname.release,
            'kernel_version': uname.version,
            'machine': uname.machine,
            'processor': uname.processor,
            'python_version': platform.python_version(),
        }
