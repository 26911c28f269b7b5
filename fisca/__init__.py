"""
fisca: motor de control de acceso jerárquico para la plataforma de
operaciones de campo (territorio Localidad -> Circuito -> Escuela -> Mesa,
pirámide de usuarios y grafo de afiliados).
"""

__version__ = "0.1.0"
